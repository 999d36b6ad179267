"""
Scheduling Domain

Structure:
```
fieldjobs/domain/scheduling/
├── schemas.py              # Locations, routes, conflicts, slots
├── geo.py                  # Haversine distance
├── time_calculator.py      # Window overlap and cadence arithmetic
├── availability_service.py # Conflict detection, availability gate
├── route_optimizer.py      # Nearest-neighbor route sequencing
├── recurrence.py           # Recurring series generation
├── suggester.py            # Ranked open slots
└── router.py               # Scheduling endpoints
```

The engines hold no session; JobService fetches commitments and persists results.
"""
