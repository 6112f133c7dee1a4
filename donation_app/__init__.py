"""Donation Desk: donation pricing and fulfillment service."""
