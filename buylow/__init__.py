"""BuyLow fantasy stock market: trade execution and settlement engine."""
