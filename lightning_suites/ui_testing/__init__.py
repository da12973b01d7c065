"""UI suites for Salesforce Lightning: framework, page objects and scenarios."""
