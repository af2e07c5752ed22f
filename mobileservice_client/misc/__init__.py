"""
Miscellaneous helpers of the mobile service client
"""
