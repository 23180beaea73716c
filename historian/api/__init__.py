"""HTTP API for Historian (FastAPI)"""
