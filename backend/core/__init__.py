"""
HoopCoach analysis core: domain models, configuration and services.
"""
