'''
Student housing finance backend.
'''
