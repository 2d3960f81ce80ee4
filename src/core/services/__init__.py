# company-roster - Core Services
# Pure helpers shared by components; no I/O here
