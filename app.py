"""Flask web application for CollabSwipe discovery."""

import logging
import os
from functools import wraps

from flask import Flask, jsonify, request, session

from collabswipe.errors import (
    MalformedRecordError,
    MatchStoreError,
    ProfileFetchError,
    SessionLoadError,
    SessionNotLoadedError,
    SessionTimeoutError,
    StaleCandidateError,
    ViewerNotFoundError,
)
from collabswipe.models import SubscriptionTier, SwipeDecision, coerce_match
from collabswipe.services import (
    DailyQuotaGate,
    DiscoverySession,
    InMemoryMatchStore,
    InMemoryProfileSource,
)
from collabswipe.services.compatibility_service import explain
from collabswipe.services.stores import sample_profiles
from collabswipe.services.supabase_store import (
    SupabaseClient,
    SupabaseMatchStore,
    SupabaseProfileSource,
    SupabaseQuotaGate,
)
from config import CURRENT_USER_ID, LOG_LEVEL, PREMIUM_USER_IDS, SUPABASE_URL

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'collabswipe-secret-key')

# Password for accessing the app
APP_PASSWORD = os.environ.get('APP_PASSWORD', 'letsmakemusic')

# Live discovery sessions, keyed by viewer id
discovery_sessions: dict[str, DiscoverySession] = {}


class MemoryBackend:
    """Stores shared by every session when no Supabase backend is configured."""

    def __init__(self, records=None, premium_ids=PREMIUM_USER_IDS):
        self.profiles = list(records if records is not None else sample_profiles())
        self.matches = InMemoryMatchStore()
        self.premium_ids = frozenset(premium_ids)
        self.quota_gates: dict[str, DailyQuotaGate] = {}

    def tier_for(self, viewer_id: str) -> SubscriptionTier:
        if viewer_id in self.premium_ids:
            return SubscriptionTier.PREMIUM
        return SubscriptionTier.FREE

    def quota_gate(self, viewer_id: str) -> DailyQuotaGate:
        """Return the viewer's gate, creating it on first use."""
        gate = self.quota_gates.get(viewer_id)
        if gate is None:
            gate = DailyQuotaGate(tier=self.tier_for(viewer_id))
            self.quota_gates[viewer_id] = gate
        return gate


memory_backend = MemoryBackend()


def build_session(viewer_id: str) -> DiscoverySession:
    """Create a discovery session over the configured backend."""
    if SUPABASE_URL:
        client = SupabaseClient()
        return DiscoverySession(
            SupabaseProfileSource(client, viewer_id),
            SupabaseMatchStore(client),
            SupabaseQuotaGate(client, viewer_id),
        )
    return DiscoverySession(
        InMemoryProfileSource(memory_backend.profiles, current_user_id=viewer_id),
        memory_backend.matches,
        memory_backend.quota_gate(viewer_id),
    )


def login_required(f):
    """Decorator to require login for async API endpoints."""
    @wraps(f)
    async def decorated_function(*args, **kwargs):
        if not session.get('authenticated'):
            return jsonify({'error': 'Authentication required'}), 401
        return await f(*args, **kwargs)
    return decorated_function


def _load_error_response(error: SessionLoadError):
    if isinstance(error, ViewerNotFoundError):
        return jsonify({'error': str(error), 'action': 'setup_profile'}), 404
    if isinstance(error, SessionTimeoutError):
        return jsonify({'error': str(error), 'action': 'retry'}), 503
    if isinstance(error, ProfileFetchError):
        return jsonify({'error': str(error), 'action': 'retry'}), 503
    return jsonify({'error': str(error)}), 500


def _current_session() -> DiscoverySession:
    viewer_id = session.get('viewer_id')
    discovery = discovery_sessions.get(viewer_id) if viewer_id else None
    if discovery is None or not discovery.is_loaded:
        raise SessionNotLoadedError('No discovery session loaded')
    return discovery


def _candidate_payload(discovery: DiscoverySession) -> dict:
    candidate = discovery.current_candidate()
    if candidate is None:
        return {'candidate': None, 'remaining': 0}
    return {
        'candidate': candidate.to_dict(),
        'compatibility': discovery.compatibility_of(candidate),
        'breakdown': explain(discovery.viewer, candidate).to_dict(),
        'remaining': discovery.feed.remaining,
    }


@app.errorhandler(SessionNotLoadedError)
def handle_no_session(error):
    return jsonify({'error': str(error), 'action': 'load_session'}), 409


@app.errorhandler(StaleCandidateError)
def handle_stale_candidate(error):
    return jsonify({'error': str(error)}), 409


@app.route('/')
def index():
    """Health check."""
    return jsonify({'status': 'ok', 'backend': 'supabase' if SUPABASE_URL else 'memory'})


@app.route('/login', methods=['POST'])
def login():
    """Handle login."""
    if request.is_json:
        password = (request.get_json() or {}).get('password', '')
    else:
        password = request.form.get('password', '')

    if password != APP_PASSWORD:
        return jsonify({'error': 'Incorrect password'}), 401
    session['authenticated'] = True
    session.permanent = True
    return jsonify({'success': True})


@app.route('/logout', methods=['POST'])
def logout():
    """Handle logout and tear down the viewer's session."""
    viewer_id = session.pop('viewer_id', None)
    discovery = discovery_sessions.pop(viewer_id, None) if viewer_id else None
    if discovery is not None:
        discovery.close()
    session.pop('authenticated', None)
    return jsonify({'success': True})


@app.route('/api/session/load', methods=['POST'])
@login_required
async def api_load_session():
    """Load (or reload) the discovery session for a viewer."""
    data = request.get_json(silent=True) or {}
    viewer_id = str(data.get('viewer_id') or session.get('viewer_id') or CURRENT_USER_ID).strip()

    previous = discovery_sessions.pop(viewer_id, None)
    if previous is not None:
        previous.close()

    discovery = build_session(viewer_id)
    try:
        loaded = await discovery.load_session()
    except SessionLoadError as e:
        logger.warning("[api] load failed for viewer=%s: %s", viewer_id, e)
        return _load_error_response(e)

    discovery_sessions[viewer_id] = discovery
    session['viewer_id'] = viewer_id
    return jsonify({
        'success': True,
        'viewer': loaded.viewer.to_dict(),
        'feed_size': len(loaded.feed),
        **_candidate_payload(discovery),
    })


@app.route('/api/session/refresh', methods=['POST'])
@login_required
async def api_refresh_session():
    """Rebuild the feed from the stores."""
    discovery = _current_session()
    try:
        await discovery.refresh()
    except SessionLoadError as e:
        return _load_error_response(e)
    return jsonify({'success': True, 'feed_size': len(discovery.feed), **_candidate_payload(discovery)})


@app.route('/api/candidate', methods=['GET'])
@login_required
async def api_candidate():
    """Return the card currently showing, with its compatibility score."""
    return jsonify(_candidate_payload(_current_session()))


@app.route('/api/gesture/start', methods=['POST'])
@login_required
async def api_gesture_start():
    discovery = _current_session()
    return jsonify({'accepted': discovery.on_gesture_start()})


@app.route('/api/gesture/sample', methods=['POST'])
@login_required
async def api_gesture_sample():
    discovery = _current_session()
    data = request.get_json(silent=True) or {}
    try:
        dx = float(data.get('dx', 0))
        dy = float(data.get('dy', 0))
    except (TypeError, ValueError):
        return jsonify({'error': 'dx and dy must be numbers'}), 400

    discovery.on_gesture_sample(dx, dy)
    hint = discovery.controller.direction_hint
    return jsonify({
        'progress': discovery.controller.progress,
        'hint': hint.value if hint else None,
    })


@app.route('/api/gesture/end', methods=['POST'])
@login_required
async def api_gesture_end():
    discovery = _current_session()
    result = await discovery.on_gesture_end()
    return jsonify({
        'result': result.to_dict() if result else None,
        **_candidate_payload(discovery),
    })


@app.route('/api/action', methods=['POST'])
@login_required
async def api_action():
    """Apply a pass, like or super-like button press."""
    discovery = _current_session()
    data = request.get_json(silent=True) or {}
    try:
        decision = SwipeDecision(data.get('action'))
    except ValueError:
        return jsonify({'error': 'action must be one of pass, like, super_like'}), 400

    result = await discovery.on_discrete_action(decision)
    return jsonify({
        'result': result.to_dict() if result else None,
        **_candidate_payload(discovery),
    })


@app.route('/api/profile', methods=['GET'])
@login_required
async def api_view_profile():
    """Summary of the card currently showing."""
    candidate = _current_session().current_candidate()
    if candidate is None:
        return jsonify({'error': 'No more profiles'}), 404
    return jsonify({'summary': candidate.summary()})


@app.route('/api/matches', methods=['GET'])
@login_required
async def api_matches():
    """List the viewer's matches."""
    discovery = _current_session()
    viewer_id = discovery.viewer.id
    try:
        records = await discovery.match_store.get_matches()
    except MatchStoreError as e:
        return jsonify({'error': str(e)}), 503

    matches = []
    for record in records:
        try:
            match = coerce_match(record)
        except MalformedRecordError:
            continue
        if match.involves(viewer_id):
            matches.append(match.to_dict())
    return jsonify({'success': True, 'matches': matches})


if __name__ == '__main__':
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get('PORT', 5000))
    app.run(debug=False, host='0.0.0.0', port=port)
