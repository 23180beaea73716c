"""LLM - Gemini model access and prompt templates"""
