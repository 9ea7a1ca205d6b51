"""
Recipe suggestion pipeline as an explicit stage machine.

    START -> DATASET_SCAN -> [WEB_SEARCH] -> VIDEO_SEARCH -> MERGE
          -> [ENCYCLOPEDIA] -> [CREATIVE] -> ENRICH -> RANK -> END

The video search starts at START and runs alongside the dataset scan and web
search; VIDEO_SEARCH only joins it. Each source is attempted at most once per
request, under its own deadline. A failing source contributes nothing and never
stops the others. Blocking I/O (file read, requests) runs in worker threads.
Each cancellable call gets its own event, set when its deadline passes or the
request is cancelled; in-flight retry loops observe it.
"""
import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Set

from core import config
from core.enrichment.creative import CreativeIdea, CreativeSuggester
from core.enrichment.image_resolver import ImageResolver
from core.enrichment.recipe_enricher import (
    DEGRADED_DESCRIPTION,
    DISABLED_DESCRIPTION,
    Enrichment,
    RecipeEnricher,
)
from core.external_apis.base import (
    EncyclopediaProvider,
    VideoSearchProvider,
    WebSearchProvider,
)
from core.external_apis.wikipedia import is_plausible_article
from core.matching.dataset_matcher import DatasetMatcher
from core.models.suggestion import EnrichedSuggestion, RawCandidate, SourceType
from core.normalization.normalizer import fold_raw_ingredients, normalize_ingredients
from core.pipeline.ranking import citation_for, rank

_SNIPPET_CHARS = 100


class Stage(str, Enum):
    START = "start"
    DATASET_SCAN = "dataset_scan"
    WEB_SEARCH = "web_search"
    VIDEO_SEARCH = "video_search"
    MERGE = "merge"
    ENCYCLOPEDIA = "encyclopedia"
    CREATIVE = "creative"
    ENRICH = "enrich"
    RANK = "rank"
    END = "end"


class InvalidRequestError(ValueError):
    """Request rejected before any stage runs (no non-blank ingredient)."""


@dataclass
class PipelineState:
    request_id: str
    user_tokens: List[str]
    web_search_enabled: bool
    cancel_event: threading.Event = field(default_factory=threading.Event)
    call_events: Set[threading.Event] = field(default_factory=set)
    dataset: List[RawCandidate] = field(default_factory=list)
    web: List[RawCandidate] = field(default_factory=list)
    video: List[RawCandidate] = field(default_factory=list)
    candidates: List[RawCandidate] = field(default_factory=list)
    creative: Optional[CreativeIdea] = None
    suggestions: List[EnrichedSuggestion] = field(default_factory=list)
    trace: List[Stage] = field(default_factory=list)
    video_task: Optional["asyncio.Task[List[RawCandidate]]"] = None


class SuggestionPipeline:
    def __init__(
        self,
        dataset_matcher: DatasetMatcher,
        web_search: Optional[WebSearchProvider] = None,
        video_search: Optional[VideoSearchProvider] = None,
        encyclopedia: Optional[EncyclopediaProvider] = None,
        image_resolver: Optional[ImageResolver] = None,
        enricher: Optional[RecipeEnricher] = None,
        creative: Optional[CreativeSuggester] = None,
        max_suggestions: int = config.MAX_SUGGESTIONS,
        min_match_ratio: float = config.MIN_MATCH_RATIO,
        concurrency: int = config.ENRICHMENT_CONCURRENCY,
        source_timeout: Optional[float] = config.SOURCE_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.dataset_matcher = dataset_matcher
        self.web_search = web_search
        self.video_search = video_search
        self.encyclopedia = encyclopedia
        self.image_resolver = image_resolver
        self.enricher = enricher
        self.creative = creative
        self.max_suggestions = max_suggestions
        self.min_match_ratio = min_match_ratio
        self.concurrency = max(1, concurrency)
        self.source_timeout = source_timeout
        self.logger = logger or logging.getLogger(__name__)
        self._handlers = {
            Stage.START: self._start,
            Stage.DATASET_SCAN: self._dataset_scan,
            Stage.WEB_SEARCH: self._web_search,
            Stage.VIDEO_SEARCH: self._video_join,
            Stage.MERGE: self._merge,
            Stage.ENCYCLOPEDIA: self._encyclopedia_supplement,
            Stage.CREATIVE: self._creative_fallback,
            Stage.ENRICH: self._enrich,
            Stage.RANK: self._rank,
        }

    # --- entry points ---

    async def suggest(self, raw_ingredients: Sequence[str], web_search_enabled: bool = False,
                      request_id: Optional[str] = None) -> List[EnrichedSuggestion]:
        """Normalize raw user input and run the pipeline. Raises InvalidRequestError if no non-blank ingredient is given."""
        cleaned = [i for i in (raw_ingredients or []) if isinstance(i, str) and i.strip()]
        if not cleaned:
            raise InvalidRequestError("Ingredients list is required")
        tokens = normalize_ingredients(cleaned)
        if not tokens:
            # Normalization drops short names like "gà"; fall back to the folded input
            tokens = fold_raw_ingredients(cleaned)
            self.logger.info("SUGGEST normalization left nothing; using raw ingredients=%s", tokens)
        return await self.run(tokens, web_search_enabled, request_id=request_id)

    async def run(self, user_tokens: Sequence[str], web_search_enabled: bool = False,
                  request_id: Optional[str] = None) -> List[EnrichedSuggestion]:
        state = PipelineState(
            request_id=request_id or uuid.uuid4().hex[:12],
            user_tokens=list(user_tokens),
            web_search_enabled=web_search_enabled,
        )
        self.logger.info(
            "SUGGEST start request_id=%s ingredients=%s web_search=%s",
            state.request_id, state.user_tokens, web_search_enabled,
        )
        stage = Stage.START
        try:
            while stage is not Stage.END:
                state.trace.append(stage)
                stage = await self._handlers[stage](state)
        except asyncio.CancelledError:
            self.logger.info("SUGGEST cancelled request_id=%s stage=%s", state.request_id, stage.value)
            self._cancel_sources(state)
            if state.video_task is not None:
                state.video_task.cancel()
            raise
        finally:
            # A video task orphaned by an unexpected fault must not outlive the request
            if state.video_task is not None and not state.video_task.done():
                self._cancel_sources(state)
                state.video_task.cancel()
        state.trace.append(Stage.END)
        self.logger.info(
            "SUGGEST done request_id=%s results=%d stages=%s",
            state.request_id, len(state.suggestions), [s.value for s in state.trace],
        )
        return state.suggestions

    # --- helpers ---

    def _cancel_sources(self, state: PipelineState) -> None:
        state.cancel_event.set()
        for event in list(state.call_events):
            event.set()

    async def _call(self, state: PipelineState, label: str, fn: Callable[..., Any], *args,
                    default: Any = None, cancellable: bool = False, **kwargs) -> Any:
        """
        Run blocking fn in a thread under the source deadline; failures and timeouts yield default.
        With cancellable=True, fn receives its own cancel_event, set when the deadline passes
        or the request is cancelled.
        Cancellation of the caller is always re-raised.
        """
        call_event = threading.Event()
        if cancellable:
            kwargs["cancel_event"] = call_event
        if state.cancel_event.is_set():
            call_event.set()
        state.call_events.add(call_event)
        future = asyncio.ensure_future(asyncio.to_thread(fn, *args, **kwargs))
        try:
            done, _ = await asyncio.wait({future}, timeout=self.source_timeout)
        except asyncio.CancelledError:
            self._cancel_sources(state)
            future.cancel()
            raise
        finally:
            state.call_events.discard(call_event)

        if not done:
            call_event.set()
            future.cancel()
            self.logger.warning("SOURCE timeout request_id=%s source=%s after=%ss",
                                state.request_id, label, self.source_timeout)
            return default
        try:
            return future.result()
        except Exception as e:
            self.logger.error("SOURCE failed request_id=%s source=%s error=%s",
                              state.request_id, label, e, exc_info=True)
        return default

    def _ingredient_query(self, state: PipelineState) -> str:
        return " ".join(state.user_tokens)

    # --- stages ---

    async def _start(self, state: PipelineState) -> Stage:
        if self.video_search is not None:
            state.video_task = asyncio.create_task(self._collect_videos(state))
        else:
            self.logger.warning("VIDEO_SEARCH not configured request_id=%s", state.request_id)
        return Stage.DATASET_SCAN

    async def _dataset_scan(self, state: PipelineState) -> Stage:
        state.dataset = await self._call(
            state, "dataset", self.dataset_matcher.match, state.user_tokens, self.min_match_ratio, default=[],
        ) or []
        if state.dataset:
            return Stage.VIDEO_SEARCH
        if not state.web_search_enabled:
            return Stage.VIDEO_SEARCH
        if self.web_search is None:
            self.logger.warning("WEB_SEARCH enabled but not configured request_id=%s", state.request_id)
            return Stage.VIDEO_SEARCH
        return Stage.WEB_SEARCH

    async def _web_search(self, state: PipelineState) -> Stage:
        query = config.WEB_QUERY_TEMPLATE.format(ingredients=self._ingredient_query(state))
        results = await self._call(
            state, "web_search", self.web_search.search, query, config.WEB_RESULTS_LIMIT,
            cancellable=True, default=[],
        ) or []
        state.web = [
            RawCandidate(name=r.title, source_type=SourceType.WEB, source_url=r.url, snippet=r.snippet or None)
            for r in results[:config.WEB_RESULTS_LIMIT]
        ]
        return Stage.VIDEO_SEARCH

    async def _collect_videos(self, state: PipelineState) -> List[RawCandidate]:
        query = config.VIDEO_QUERY_TEMPLATE.format(ingredients=self._ingredient_query(state))
        results = await self._call(
            state, "video_search", self.video_search.search, query, config.VIDEO_RESULTS_LIMIT,
            cancellable=True, default=[],
        ) or []
        return [
            RawCandidate(
                name=v.title,
                source_type=SourceType.VIDEO,
                source_url=v.url,
                snippet=(v.description[:_SNIPPET_CHARS] or None),
                image_url=v.thumbnail_url,
                channel=v.channel,
            )
            for v in results[:config.VIDEO_RESULTS_LIMIT]
        ]

    async def _video_join(self, state: PipelineState) -> Stage:
        if state.video_task is not None:
            state.video = await state.video_task
        return Stage.MERGE

    async def _merge(self, state: PipelineState) -> Stage:
        state.candidates = rank(state.dataset + state.web + state.video, limit=self.max_suggestions)
        self.logger.info(
            "MERGE request_id=%s dataset=%d web=%d video=%d kept=%d",
            state.request_id, len(state.dataset), len(state.web), len(state.video), len(state.candidates),
        )
        if not state.candidates:
            return Stage.CREATIVE
        if len(state.candidates) < self.max_suggestions and self.encyclopedia is not None:
            return Stage.ENCYCLOPEDIA
        return Stage.ENRICH

    async def _encyclopedia_supplement(self, state: PipelineState) -> Stage:
        # Only the top-ranked candidate is looked up
        top = state.candidates[0]
        if any(c.source_type == SourceType.ENCYCLOPEDIA or "wikipedia.org" in (c.source_url or "")
               for c in state.candidates):
            return Stage.ENRICH
        query = config.ENCYCLOPEDIA_QUERY_TEMPLATE.format(name=top.name)
        article = await self._call(
            state, "encyclopedia", self.encyclopedia.lookup, query, config.ENCYCLOPEDIA_MAX_CHARS,
            cancellable=True,
        )
        if not is_plausible_article(article):
            self.logger.info("ENCYCLOPEDIA no suitable article request_id=%s query=%s", state.request_id, query[:60])
            return Stage.ENRICH
        state.candidates.append(
            RawCandidate(
                name=top.name,
                source_type=SourceType.ENCYCLOPEDIA,
                source_url=article.url,
                snippet=article.text[:300],
            )
        )
        self.logger.info("ENCYCLOPEDIA added request_id=%s name=%s", state.request_id, top.name[:60])
        return Stage.ENRICH

    async def _creative_fallback(self, state: PipelineState) -> Stage:
        if self.creative is None:
            return Stage.ENRICH
        idea = await self._call(state, "creative", self.creative.suggest, state.user_tokens)
        if idea is not None:
            state.creative = idea
            state.candidates = [RawCandidate(name=idea.name, source_type=SourceType.AI)]
        return Stage.ENRICH

    async def _enrich_one(self, state: PipelineState, candidate: RawCandidate,
                          semaphore: asyncio.Semaphore) -> EnrichedSuggestion:
        async with semaphore:
            if candidate.source_type == SourceType.VIDEO:
                image_coro = asyncio.sleep(0, result=candidate.image_url)
            elif self.image_resolver is not None:
                image_coro = self._call(
                    state, "image", self.image_resolver.resolve, candidate.name, candidate.source_url,
                    cancellable=True,
                )
            else:
                image_coro = asyncio.sleep(0, result=None)

            if candidate.source_type == SourceType.AI and state.creative is not None:
                enrich_coro = asyncio.sleep(0, result=Enrichment(state.creative.description, state.creative.tags))
            elif self.enricher is not None:
                enrich_coro = self._call(
                    state, "enrichment", self.enricher.enrich, candidate, state.user_tokens,
                    default=Enrichment(DEGRADED_DESCRIPTION, {}, degraded=True),
                )
            else:
                enrich_coro = asyncio.sleep(0, result=Enrichment(DISABLED_DESCRIPTION, {}, degraded=True))

            image_url, enrichment = await asyncio.gather(image_coro, enrich_coro)

        return EnrichedSuggestion(
            name=candidate.name,
            description=enrichment.description,
            tags=dict(enrichment.tags),
            image_url=image_url,
            citation=citation_for(candidate),
            source_type=candidate.source_type,
            match_ratio=candidate.match_ratio,
        )

    async def _enrich(self, state: PipelineState) -> Stage:
        # Nothing past the output bound is enriched or has its image resolved
        bounded = state.candidates[:self.max_suggestions]
        semaphore = asyncio.Semaphore(self.concurrency)
        state.suggestions = list(
            await asyncio.gather(*(self._enrich_one(state, c, semaphore) for c in bounded))
        )
        return Stage.RANK

    async def _rank(self, state: PipelineState) -> Stage:
        state.suggestions = rank(state.suggestions, limit=self.max_suggestions)
        return Stage.END


def build_pipeline(logger: Optional[logging.Logger] = None) -> SuggestionPipeline:
    """Wire the pipeline from config; providers without credentials are left out."""
    from core.external_apis.google_search import GoogleImageSearch, GoogleWebSearch
    from core.external_apis.page_fetch import PageFetcher
    from core.external_apis.wikipedia import WikipediaLookup
    from core.external_apis.youtube import YouTubeVideoSearch
    from core.llm_client import build_llm_client

    base = logger or logging.getLogger("core.pipeline")
    google_key = config.get_google_search_api_key()
    engine_id = config.get_google_search_engine_id()
    youtube_key = config.get_youtube_api_key()
    llm = build_llm_client()

    web_search = GoogleWebSearch(google_key, engine_id) if google_key and engine_id else None
    image_search = GoogleImageSearch(google_key, engine_id) if google_key and engine_id else None
    return SuggestionPipeline(
        dataset_matcher=DatasetMatcher(logger=base.getChild("dataset")),
        web_search=web_search,
        video_search=YouTubeVideoSearch(youtube_key) if youtube_key else None,
        encyclopedia=WikipediaLookup(config.get_wikipedia_lang()) if config.get_wikipedia_enabled() else None,
        image_resolver=ImageResolver(PageFetcher(), image_search, logger=base.getChild("image")),
        enricher=RecipeEnricher(llm, logger=base.getChild("enrichment")),
        creative=CreativeSuggester(llm, logger=base.getChild("creative")),
        logger=base,
    )
