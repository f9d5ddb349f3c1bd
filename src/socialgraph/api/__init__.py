"""
HTTP application for socialgraph
"""
