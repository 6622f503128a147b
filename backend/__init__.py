"""Expense tracker REST API."""
