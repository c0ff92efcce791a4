"""Demo application for the XACML scope validator."""
