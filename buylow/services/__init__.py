"""Business logic for BuyLow: the trade engine and its read models."""
