# Provider and orchestration services
