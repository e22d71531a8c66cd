"""Download metrics collector package.

Collects release-asset downloads, container-package downloads and star
counts for GitHub repositories and exports them as Prometheus metrics.

Key modules:
    fetcher         -- PageFetcher: one HTML page -> parsed document
    extractor       -- VersionListLayout, extract_entries, extract_download_summary
    classifier      -- classify / resolve_label for tagged vs digest-only entries
    counts          -- parse_count for human-formatted download counts
    paginator       -- PaginationDriver walking a versions listing page by page
    github          -- GitHubClient for releases and stargazers
    base            -- BaseCollector abstract per-repository pipeline
    collector       -- RepositoryCollector concrete implementation
    controller      -- ThreadPoolController for running repositories
    rate_limiter    -- RateLimiter shared by every outbound request
    metrics         -- MetricsCollector for runtime statistics
    exporter        -- DownloadMetrics counters and metric sinks
    storage         -- StorageBase and JsonlStorage for result records
    config          -- Settings loaded from the environment
    models          -- dataclasses shared across modules
    errors          -- exception hierarchy
"""
