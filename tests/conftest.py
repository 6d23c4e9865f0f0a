import pytest

from caselog.config import ExtractorConfig
from caselog.extractor import SegmentExtractor

# testSearch starts on driver drv-3c4d, then testLogin on drv-1a2b; their
# steps interleave in the shared file the way parallel TestNG threads write.
SAMPLE_LOG = """\
2025-10-19 10:00:00.001 [TestNG-PoolService-1] INFO  BaseTest - [drv-3c4d] Test case started: testSearch
2025-10-19 10:00:00.050 [TestNG-PoolService-0] INFO  BaseTest - [drv-1a2b] Test case started: testLogin
2025-10-19 10:00:00.120 [TestNG-PoolService-0] INFO  LoginPage - [drv-1a2b] testLogin: entering username
2025-10-19 10:00:00.180 [TestNG-PoolService-1] INFO  SearchPage - [drv-3c4d] testSearch: typing query
2025-10-19 10:00:00.240 [TestNG-PoolService-0] INFO  LoginPage - [drv-1a2b] testLogin: clicking submit
2025-10-19 10:00:00.300 [TestNG-PoolService-1] INFO  BaseTest - [drv-3c4d] Test case pass: testSearch
2025-10-19 10:00:00.360 [TestNG-PoolService-0] ERROR BaseTest - [drv-1a2b] Test case fail: testLogin
2025-10-19 10:00:00.420 [main] INFO  Suite - run finished
"""


@pytest.fixture
def sample_log(tmp_path):
    path = tmp_path / "Logs.log"
    path.write_text(SAMPLE_LOG, encoding="utf-8")
    return str(path)


@pytest.fixture
def extractor(sample_log):
    """Extractor whose default log path points at the sample log."""
    return SegmentExtractor(ExtractorConfig(default_log_path=sample_log))


@pytest.fixture
def sample_lines():
    return SAMPLE_LOG.splitlines()
