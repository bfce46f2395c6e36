"""DocArchive - document archive with metadata search and background OCR."""
