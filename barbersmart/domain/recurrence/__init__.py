"""Recurrence domain - Recurring booking dates and batched availability probing"""
