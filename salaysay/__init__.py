"""Salaysay document intake.

Turns scanned or typed student excuse letters (PDF, JPEG, PNG) into
searchable PDFs and structured, classified submission records, combining
Tesseract OCR, PyMuPDF layout-aware text extraction, bilingual
English/Tagalog pattern extraction and rule-based violation classification.
"""
