# Request/response schemas and provider response schemas
