"""Pairlink relay application."""
