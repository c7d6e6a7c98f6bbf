"""
Tessa Backend — Services Layer
================================

What:  Business logic between routes (HTTP) and the database / model provider.
How:   Stateless service objects receive the request's AsyncSession per call;
       model-backed stages are injected into the audio orchestrator.

Service Inventory:
    - GeminiClient: SDK access with retries and circuit breaker
    - AudioFileService: upload validation and temp-file staging
    - GeminiTranscriptionService / GeminiAnalysisService: pipeline stages
    - AudioAnalysisAgent: transcribe → analyze orchestration
    - AudioSummaryService: owner-scoped persistence of analyses
    - AuthService, ProjectService, SubscriptionService: accounts, quotas, plans
    - PaymentAdapter: payment provider boundary (mocked)
"""
