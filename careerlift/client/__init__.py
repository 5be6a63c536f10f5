from careerlift.client.api_client import AnalysisSink, CareerLiftClient, CareerLiftClientError

__all__ = ["AnalysisSink", "CareerLiftClient", "CareerLiftClientError"]
