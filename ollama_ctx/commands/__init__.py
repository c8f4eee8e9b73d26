"""
Command groups for the ollama-ctx CLI.
"""
