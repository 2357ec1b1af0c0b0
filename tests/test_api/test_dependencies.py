from src.api.dependencies import get_manual_cron_service


def test_manual_scrapes_do_not_share_the_scheduler_session(cron_service):
    manual = get_manual_cron_service(cron_service)

    assert manual is not cron_service
    assert manual.scraper.session is not cron_service.scraper.session
    assert manual.llm_service is cron_service.llm_service
    assert manual.settings is cron_service.settings
    assert manual.session_factory is cron_service.session_factory
