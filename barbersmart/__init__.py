"""BarberSmart - Availability resolution and slot generation for barbershops"""
