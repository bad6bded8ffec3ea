"""
Service layer for Deepmetric.

- migrations: versioned upgrades for persisted user records
- enrollment: pure enrollment and completion-approval transitions
- directory: persistence and notification adapter for the transitions
- catalog: course catalog and review store
- notifications: transient notifications and simulated email
- certificates: certificate views and credential ids
- advisor: generative AI course advisor and tag suggestions
"""
