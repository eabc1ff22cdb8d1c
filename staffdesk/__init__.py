"""StaffDesk - appointment booking and onboarding backend for a staffing agency"""
