"""Mock award candidates and a scripted engine for testing."""

from datetime import date
from typing import Callable, Optional

from award_sweep.engines.base import Engine, EngineConfig
from award_sweep.models import Query, SearchResults

SQ_NONSTOP = {
    "fares": "I",
    "mileage": 27500,
    "segments": [
        {
            "airline": "SQ",
            "flight": "SQ 872",
            "from_city": "SIN",
            "to_city": "HKG",
            "date": "2024-01-01",
            "departure": "09:00",
            "arrival": "12:55",
            "lag_days": 0,
            "cabin": "business",
        }
    ],
}

# Same flight as SQ_NONSTOP, offered under a second fare code
SQ_NONSTOP_WAITLIST = {
    "fares": "Z I",
    "mileage": 27500,
    "segments": [dict(SQ_NONSTOP["segments"][0])],
}

# Connection via Bangkok on a partner carrier, economy then business
SQ_TG_CONNECTION = {
    "fares": ["X"],
    "mileage": 30000,
    "segments": [
        {
            "airline": "SQ",
            "flight": "SQ 708",
            "from_city": "SIN",
            "to_city": "BKK",
            "date": "2024-01-01",
            "departure": "08:00",
            "arrival": "09:25",
            "lag_days": 0,
            "cabin": "economy",
        },
        {
            "airline": "TG",
            "flight": "TG 600",
            "from_city": "BKK",
            "to_city": "HKG",
            "date": "2024-01-01",
            "departure": "11:00",
            "arrival": "14:45",
            "lag_days": 0,
            "cabin": "business",
        },
    ],
}

# Red-eye arriving the next day, no award seats left
SQ_REDEYE_SOLD_OUT = {
    "fares": "",
    "segments": [
        {
            "airline": "SQ",
            "flight": "SQ 882",
            "from_city": "SIN",
            "to_city": "HKG",
            "date": "2024-01-01",
            "departure": "22:00",
            "arrival": "06:00",
            "lag_days": 1,
        }
    ],
}


def candidate_for(query: Query, flight: str = "SQ 872", fares: str = "I") -> dict:
    """A minimal valid nonstop candidate matching a query's outbound leg."""
    return {
        "fares": fares,
        "segments": [
            {
                "airline": query.engine,
                "flight": flight,
                "from_city": query.from_city,
                "to_city": query.to_city,
                "date": query.depart_date.isoformat(),
                "departure": "09:00",
                "arrival": "12:55",
                "lag_days": 0,
            }
        ],
    }


SQ_CONFIG = EngineConfig(
    id="SQ",
    name="Singapore Airlines",
    website="KrisFlyer",
    roundtrip_optimized=False,
    oneway_supported=True,
    min_days=0,
    max_days=355,
)


class FakeEngine(Engine):
    """Engine answering queries from a callable instead of a website."""

    def __init__(
        self,
        responder: Optional[Callable[[Query], SearchResults]] = None,
        config: EngineConfig = SQ_CONFIG,
        init_error: Optional[Exception] = None,
    ):
        self.config = config
        self.responder = responder or (lambda q: SearchResults(query=q, awards=[]))
        self.init_error = init_error
        self.initialize_calls = []
        self.queries: list[Query] = []
        self.closed = False

    async def initialize(self, credentials=None, parse=True, headless=False):
        self.initialize_calls.append(
            {"credentials": credentials, "parse": parse, "headless": headless}
        )
        if self.init_error is not None:
            raise self.init_error

    async def search(self, query: Query) -> SearchResults:
        self.queries.append(query)
        return self.responder(query)

    async def close(self):
        self.closed = True


TODAY = date(2023, 12, 1)
