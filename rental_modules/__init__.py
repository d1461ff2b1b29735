"""
Rental Modules.

Orchestration over the rental kernel, engines and services.  Each module
contains:
- Domain models (the nouns)
- Workflows (state machines)
- ORM models and a repository
- A service facade owning the transaction boundary

Modules:
- Contracts: rental contracts, cheque schedules, completeness and approval
"""
