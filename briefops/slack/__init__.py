"""Slack integration module."""
