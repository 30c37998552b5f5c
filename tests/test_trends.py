import pytest

from guest_reviews.models.analytics import MonthBucket
from guest_reviews.pipeline.trends import TrendAnalyzer


def test_monthly_buckets_are_sorted_and_complete(make_review) -> None:
    reviews = [
        make_review(1, rating=8, submitted_at="2024-03-10T00:00:00+00:00"),
        make_review(2, rating=6, submitted_at="2024-01-05T00:00:00+00:00"),
        make_review(3, rating=None, submitted_at="2024-03-28T00:00:00+00:00"),
        make_review(4, rating=9, submitted_at="2024-02-14T00:00:00+00:00"),
    ]

    buckets = TrendAnalyzer().monthly_buckets(reviews)

    assert [bucket.month for bucket in buckets] == ["2024-01", "2024-02", "2024-03"]
    assert sum(bucket.count for bucket in buckets) == len(reviews)
    assert buckets[2].count == 2
    assert buckets[2].average_rating == 4.0


def test_too_few_reviews_give_empty_results(make_review) -> None:
    analyzer = TrendAnalyzer()
    reviews = [
        make_review(1, rating=4, text="noisy noisy noisy"),
        make_review(2, rating=3, text="noisy again", submitted_at="2024-02-01T00:00:00+00:00"),
    ]

    buckets = analyzer.monthly_buckets(reviews)

    assert buckets == []
    assert analyzer.recurring_issues(reviews) == []
    assert analyzer.overall_trend_percent(buckets) == 0.0


def _buckets(*averages: float) -> list[MonthBucket]:
    return [
        MonthBucket(month=f"2024-{index + 1:02d}", count=1, average_rating=average)
        for index, average in enumerate(averages)
    ]


def test_overall_trend_compares_recent_with_oldest_months() -> None:
    analyzer = TrendAnalyzer()

    assert analyzer.overall_trend_percent(_buckets(6, 6, 6, 9, 9, 9)) == pytest.approx(50.0)
    assert analyzer.overall_trend_percent(_buckets(5, 8, 8, 8)) == pytest.approx(60.0)
    assert analyzer.overall_trend_percent(_buckets(10, 10, 8, 8, 8)) == pytest.approx(-20.0)


def test_overall_trend_needs_a_baseline() -> None:
    analyzer = TrendAnalyzer()

    assert analyzer.overall_trend_percent([]) == 0.0
    assert analyzer.overall_trend_percent(_buckets(8)) == 0.0
    assert analyzer.overall_trend_percent(_buckets(4, 8, 9)) == 0.0
    assert analyzer.overall_trend_percent(_buckets(0, 8, 9, 9)) == 0.0


def test_two_months_compare_against_the_first() -> None:
    analyzer = TrendAnalyzer()

    assert analyzer.overall_trend_percent(_buckets(4, 8)) == pytest.approx(50.0)
    assert analyzer.overall_trend_percent(_buckets(8, 6)) == pytest.approx(-12.5)


def test_trend_direction_thresholds() -> None:
    analyzer = TrendAnalyzer()

    assert analyzer.trend_direction(5.1) == "improving"
    assert analyzer.trend_direction(5.0) == "flat"
    assert analyzer.trend_direction(-5.0) == "flat"
    assert analyzer.trend_direction(-7.5) == "declining"


def test_rating_distribution_bands(make_review) -> None:
    ratings = [10, 9, 8.5, 7, 6, 5, 4.9, None]
    reviews = [make_review(index, rating=rating) for index, rating in enumerate(ratings)]

    distribution = TrendAnalyzer().rating_distribution(reviews)

    assert (distribution.excellent, distribution.good, distribution.average, distribution.poor) == (2, 2, 2, 2)
    assert distribution.total == len(reviews)


def test_rating_distribution_of_empty_set() -> None:
    assert TrendAnalyzer().rating_distribution([]).total == 0


def test_recurring_issues_only_mine_low_rated_reviews(make_review) -> None:
    reviews = [
        make_review(1, rating=6, text="Noisy street, noisy bar downstairs."),
        make_review(2, rating=None, text="Very noisy at night."),
        make_review(3, rating=9, text="Spotless flat. Spotless kitchen."),
        make_review(4, rating=8, text="Spotless and bright."),
    ]

    issues = TrendAnalyzer().recurring_issues(reviews)

    assert issues[0].model_dump() == {"word": "noisy", "count": 3}
    assert "spotless" not in [issue.word for issue in issues]


def test_recurring_issues_keep_first_seen_order_on_ties(make_review) -> None:
    reviews = [
        make_review(1, rating=5, text="Heating broken"),
        make_review(2, rating=5, text="broken heating, wifi"),
        make_review(3, rating=5, text="wifi"),
        make_review(4, rating=5, text="towels towels towels"),
    ]

    issues = TrendAnalyzer().recurring_issues(reviews)

    assert [(issue.word, issue.count) for issue in issues] == [
        ("towels", 3),
        ("heating", 2),
        ("broken", 2),
        ("wifi", 2),
    ]


def test_recurring_issues_are_capped(make_review) -> None:
    words = [f"issue{letter}" for letter in "abcdefghij"]
    text = " ".join(words)
    reviews = [make_review(index, rating=3, text=text) for index in range(3)]

    issues = TrendAnalyzer().recurring_issues(reviews)

    assert [issue.word for issue in issues] == words[:8]


def test_issue_tokens_drop_short_numeric_and_stopwords() -> None:
    tokens = TrendAnalyzer().issue_tokens("The 2024 towels were missing, THEIR towels!")

    assert tokens == ["towels", "missing", "towels"]


def test_category_trends_are_ranked(make_review) -> None:
    reviews = [
        make_review(1, categories={"cleanliness": 10, "communication": 6}),
        make_review(2, categories={"cleanliness": 8}),
        make_review(3, categories={"location": 9, "communication": 8}),
    ]

    trends = TrendAnalyzer().category_trends(reviews)

    assert [(trend.category, trend.average, trend.count) for trend in trends] == [
        ("cleanliness", 9.0, 2),
        ("location", 9.0, 1),
        ("communication", 7.0, 2),
    ]


def test_analyze_bundles_all_signals(make_review) -> None:
    reviews = [
        make_review(1, rating=6, submitted_at="2024-01-10T00:00:00+00:00", text="noisy room"),
        make_review(2, rating=6, submitted_at="2024-02-10T00:00:00+00:00", text="noisy street"),
        make_review(3, rating=9, submitted_at="2024-03-10T00:00:00+00:00"),
        make_review(4, rating=9, submitted_at="2024-04-10T00:00:00+00:00"),
    ]

    report = TrendAnalyzer().analyze(reviews)

    assert report.has_enough_data is True
    assert len(report.monthly) == 4
    assert report.overall_trend_percent == pytest.approx(100 / 3)
    assert report.direction == "improving"
    assert report.rating_distribution.total == 4
    assert [issue.word for issue in report.recurring_issues] == ["noisy"]
