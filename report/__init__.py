"""
Report package: LLM prompt templates and narrative generation.
"""
