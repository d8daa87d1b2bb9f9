"""Day Ledger: hour-by-hour activity log with derived daily energy stats."""
