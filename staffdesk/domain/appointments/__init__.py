"""Appointments - slot catalog, availability, booking workflow and status lifecycle"""
