# Notes/__init__.py
# Content edits, migration between buckets and the focus timer
