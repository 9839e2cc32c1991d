"""Service layer — operations over a knowledge base returning ServiceResult.

Services rebuild the corpus from the source files, run the pipeline
(parse, validate, index, resolve, evaluate) and package a report. They
never raise for per-document problems.
"""
