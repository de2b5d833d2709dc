"""Business Card Lead Capture.

Reads business card photos with Tesseract OCR, parses the text into
structured contact records, stores them as leads, and syncs them to a
CRM in the background.
"""
