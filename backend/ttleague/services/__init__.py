"""
Services Layer

Pure league logic (standings, bracket progression, result evaluation,
recommendations, export) plus knockout_service, which is the only module
here that reads or writes the database. None depend on HTTP objects.
"""
