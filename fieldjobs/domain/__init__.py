"""Domain packages: jobs (lifecycle, persistence, API) and scheduling (engines)"""
