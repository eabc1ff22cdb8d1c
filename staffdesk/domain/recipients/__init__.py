"""Recipients - booking invitees and bulk import"""
