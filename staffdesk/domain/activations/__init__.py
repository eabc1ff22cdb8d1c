"""SMS activation requests and phone number pool"""
