"""Domain modules"""
