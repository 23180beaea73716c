"""Enrichment - AI-generated descriptions, narratives and key points for records"""
