"""AWS session, credential and EC2 provider helpers."""
