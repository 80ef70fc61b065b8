"""Diplomatic pouch document extraction core.

Turns OCR output (text, key-value pairs and tables) of pouch manifests and
dispatch sheets into structured, validated records, and links manifest
items to the dispatch sheets they carry.
"""
