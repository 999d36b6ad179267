"""
Jobs Domain

Lifecycle state machine, persistence and the JobService facade that the HTTP layer and
the scheduling engines meet through.
"""
