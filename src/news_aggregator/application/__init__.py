"""
Application Layer - Use Cases and Business Logic Orchestration

Contains:
- news: aggregation pipeline (normalizer, query engine, ranker, paginator,
  error classifier, service, feed refresher, prefetch job)
"""
