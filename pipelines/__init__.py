"""
Pipelines

Extract (ESPN), transform (tiers, categories, events) and the two refresh
pipelines: Big Games and favorite team schedules. Submodules are imported
directly; this package stays import-light because the schemas depend on
pipelines.transformers.
"""
