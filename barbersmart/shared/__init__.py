"""Shared helpers - Time parsing and input validation"""
