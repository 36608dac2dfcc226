"""
fusion

Protocol mechanisms for intent-based order settlement:
- Gas-adjusted Dutch auction pricing of order fills
- One-per-address KYC identity token with signature-delegated operations
"""
