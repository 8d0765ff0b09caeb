"""Availability domain - Business hours, staff schedules, slots and overlap checks"""
