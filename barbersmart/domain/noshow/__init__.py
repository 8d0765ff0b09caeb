"""No-show domain - Reschedule suggestions for missed appointments"""
