"""
Shared fixtures: sample job pages and render queue factories.
"""

import pytest

from jobparser.services.render_queue import RenderQueue

GREENHOUSE_URL = "https://job-boards.greenhouse.io/acme/jobs/123"
META_URL = "https://www.metacareers.com/jobs/1234567890/"
MICROSOFT_URL = "https://jobs.careers.microsoft.com/global/en/job/1818936/Principal-Software-Engineer"


@pytest.fixture
def greenhouse_html() -> str:
    return """
    <html>
      <head><title>Job Application for Software Engineer at Acme - Greenhouse</title></head>
      <body>
        <div class="job__title">
          <h1 class="section-header section-header--large font-primary">Software Engineer</h1>
        </div>
        <div class="job__location"><svg></svg><div>Remote</div></div>
        <div class="job__description body">
          <p>Build reliable services for our customers.</p>
          <p>Annual Salary Range: $105,000—$180,000 USD</p>
        </div>
        <div class="application">Apply for this job</div>
      </body>
    </html>
    """


@pytest.fixture
def meta_html() -> str:
    return """
    <html>
      <head><title>Software Engineer, Infrastructure | Meta Careers</title></head>
      <body>
        <div class="_army">Software Engineer, Infrastructure</div>
        <div class="_careersV2RefreshJobDetailPage__location2024">Menlo Park, CA •</div>
        <div class="_careersV2RefreshJobDetailPage__location2024">Seattle, WA</div>
        <div class="_8muv _ar_h">
          <div class="_1n-_ _6hy- _94t2">Meta builds technologies that help people connect.</div>
          <div class="_1n-z _6hy- _8lfs">Responsibilities</div>
          <div>
            <div class="_1n-_ _6hy- _8lf-">Design distributed systems</div>
            <div class="_1n-_ _6hy- _8lf-">Lead cross-team projects</div>
          </div>
          <div class="_1n-z _6hy- _8lfs">Minimum Qualifications</div>
          <div>
            <div class="_1n-_ _6hy- _8lf-">BS in Computer Science</div>
          </div>
          <div>$173,000/year + bonus + equity + benefits</div>
        </div>
      </body>
    </html>
    """


@pytest.fixture
def microsoft_html() -> str:
    return """
    <html>
      <head><title>Principal Software Engineer | Microsoft Careers</title></head>
      <body>
        <main>
          <h1>Principal Software Engineer</h1>
          <p style="font-size: 14px">Redmond, Washington, United States</p>
          <h3>Overview</h3>
          <div>Join the Azure team to build cloud services.</div>
          <h3>Qualifications</h3>
          <div>Bachelor's degree and 8+ years of experience.</div>
          <h3>Responsibilities</h3>
          <div>Own the architecture of core services.</div>
          <p>The typical base pay range for this role across the U.S. is USD $161,600 - $286,200 per year.</p>
        </main>
      </body>
    </html>
    """


@pytest.fixture
async def make_queue():
    """Factory for render queues that are shut down after the test."""
    queues = []

    def factory(engine, **kwargs) -> RenderQueue:
        kwargs.setdefault("max_concurrent_instances", 2)
        kwargs.setdefault("queue_timeout_seconds", 5)
        kwargs.setdefault("request_timeout_seconds", 5)
        kwargs.setdefault("default_wait_seconds", 0)
        queue = RenderQueue(engine, **kwargs)
        queues.append(queue)
        return queue

    yield factory

    for queue in queues:
        await queue.shutdown(grace_seconds=2)
