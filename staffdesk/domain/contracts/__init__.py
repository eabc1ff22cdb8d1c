"""Employment contract onboarding"""
