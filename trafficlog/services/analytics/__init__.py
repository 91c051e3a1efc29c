"""Request analytics: classification, access gate, tracking and dashboard stats."""
