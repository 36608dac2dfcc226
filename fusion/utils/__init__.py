"""Shared helpers: logging and input validation"""
