"""SolarQuote — marketplace for solar installation quotations."""
