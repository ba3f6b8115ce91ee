"""CCCD information extraction.

Reads Vietnamese citizen identity cards (CCCD): enhances the photo for
OCR, runs Tesseract and pulls the holder's full name, national ID number
and date of birth out of the recognized text.
"""
