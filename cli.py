import argparse
import json
import os
import sys
import uuid as _uuid

from db.connection import get_connection
from db import schema
from db.repos.companies_repo import CompaniesRepo
from db.repos.settings_repo import SettingsRepo
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.reconcile_expired import ReconcileExpiredRequests
from pipelines.steps.verify_companies import LoadPendingCompanies, VerifyAndPersistCompanies
from services.errors import IntroError, InvalidInput
from services.introduction_lifecycle import IntroductionLifecycle
from services.introduction_query import IntroductionQuery, FILTERS, SORTS
from services.mapping import map_to_introduction_schema
from services.reporting import print_summary
from services.verification_service import VerificationService, ENTITY_TYPES
from config.settings import get_settings
from utils.logging_setup import init_logging


def _open(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    args.conn = conn
    return conn


def _emit(payload):
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_bootstrap(args):
    _open(args)
    print("Schema ready")


def cmd_send(args):
    conn = _open(args)
    request_id = IntroductionLifecycle(conn).send(
        args.company,
        args.professional,
        args.sender,
        args.message,
        match_score=args.match_score,
        job_role_id=args.job_role,
    )
    _emit({"requestId": request_id})


def cmd_accept(args):
    conn = _open(args)
    IntroductionLifecycle(conn).accept(args.request, args.professional, args.message)
    _emit({})


def cmd_decline(args):
    conn = _open(args)
    IntroductionLifecycle(conn).decline(args.request, args.professional, args.message)
    _emit({})


def cmd_mark_viewed(args):
    conn = _open(args)
    IntroductionLifecycle(conn).mark_viewed(args.request, args.professional)
    _emit({})


def cmd_list(args):
    conn = _open(args)
    query = IntroductionQuery(conn)
    if args.professional is not None:
        page = query.list_received(args.professional, args.filter, args.sort, args.page, args.limit, args.query)
        counts = query.status_counts(professional_id=args.professional)
    else:
        page = query.list_sent(args.company, args.filter, args.sort, args.page, args.limit, args.query)
        counts = query.status_counts(company_id=args.company)
    _emit({
        "requests": map_to_introduction_schema(page.items, page.as_of),
        "pagination": page.pagination(),
        "counts": counts,
    })


def cmd_verify_professional(args):
    conn = _open(args)
    result = VerificationService(conn).verify_professional(args.professional, args.reviewer, args.notes, strict=args.strict)
    _emit(result)


def cmd_verify_company(args):
    conn = _open(args)
    _emit(VerificationService(conn).verify_company(args.company, actor_id=args.actor))


def cmd_verify_companies(args):
    conn = _open(args)

    def _progress(cur, total, company_id, name):
        print(f"[{cur}/{total}] Verifying company_id={company_id} name={name}")

    ctx = RunContext()
    pipeline = Pipeline([
        LoadPendingCompanies(conn, limit=args.limit),
        VerifyAndPersistCompanies(conn, actor_id=args.actor, on_progress=_progress if args.progress else None),
    ])
    ctx = pipeline.run(ctx)
    _emit({"verified": int(ctx.meta.get("companies_verified") or 0), "verdicts": ctx.meta.get("verdicts") or {}})


def cmd_reconcile_expired(args):
    conn = _open(args)
    ctx = Pipeline([
        ReconcileExpiredRequests(conn, batch_size=args.batch_size, max_batches=None if args.drain else args.max_batches),
    ]).run(RunContext())
    _emit({"count": int(ctx.meta.get("expired_flipped") or 0)})


def cmd_stats(args):
    conn = _open(args)
    stats = IntroductionQuery(conn).company_stats(args.company)
    if args.json:
        _emit(stats)
        return
    company = CompaniesRepo(conn).get(args.company)
    print_summary(stats, company_name=company.company_name if company else None)


def cmd_verification_queue(args):
    conn = _open(args)
    _emit(VerificationService(conn).verification_queue(args.threshold))


def cmd_settings(args):
    conn = _open(args)
    repo = SettingsRepo(conn)
    if args.action == "set":
        if not (args.key and args.value):
            raise InvalidInput("settings set requires --key and --value")
        try:
            repo.set_value(args.key, args.value, args.updated_by)
        except ValueError as e:
            raise InvalidInput(str(e))
    _emit(repo.get_all())


def cmd_approve(args):
    conn = _open(args)
    _emit(VerificationService(conn).approve(args.entity_type, args.entity_id, args.reviewer, status=args.status, notes=args.notes))


def cmd_reject(args):
    conn = _open(args)
    _emit(VerificationService(conn).reject(args.entity_type, args.entity_id, args.reviewer, args.reason))


def build_parser(settings):
    parser = argparse.ArgumentParser(description="Introduction workflow CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables, indexes and default system settings")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_send = sub.add_parser("send", help="Send an introduction request (debits one credit)")
    p_send.add_argument("--company", type=int, required=True)
    p_send.add_argument("--professional", type=int, required=True)
    p_send.add_argument("--sender", type=int, required=True, help="HR partner id")
    p_send.add_argument("--message", required=True)
    p_send.add_argument("--match-score", type=float, default=None)
    p_send.add_argument("--job-role", type=int, default=None)
    p_send.set_defaults(func=cmd_send)

    for name, func, text in (
        ("accept", cmd_accept, "Accept a pending introduction"),
        ("decline", cmd_decline, "Decline a pending introduction"),
    ):
        p = sub.add_parser(name, help=text)
        p.add_argument("--request", type=int, required=True)
        p.add_argument("--professional", type=int, required=True)
        p.add_argument("--message", default=None, help="Optional response message")
        p.set_defaults(func=func)

    p_mv = sub.add_parser("mark-viewed", help="Mark an introduction as viewed")
    p_mv.add_argument("--request", type=int, required=True)
    p_mv.add_argument("--professional", type=int, required=True)
    p_mv.set_defaults(func=cmd_mark_viewed)

    p_ls = sub.add_parser("list", help="List received (professional) or sent (company) introductions")
    who = p_ls.add_mutually_exclusive_group(required=True)
    who.add_argument("--professional", type=int)
    who.add_argument("--company", type=int)
    p_ls.add_argument("--filter", choices=list(FILTERS), default="all")
    p_ls.add_argument("--sort", choices=list(SORTS), default="newest")
    p_ls.add_argument("--page", type=int, default=1)
    p_ls.add_argument("--limit", type=int, default=10)
    p_ls.add_argument("--query", "-q", default=None, help="Search role, company, industry or location")
    p_ls.set_defaults(func=cmd_list)

    p_vp = sub.add_parser("verify-professional", help="Check a professional's LinkedIn profile")
    p_vp.add_argument("--professional", type=int, required=True)
    p_vp.add_argument("--reviewer", required=True)
    p_vp.add_argument("--notes", default=None)
    p_vp.add_argument("--strict", action="store_true", help="Fail with ManualReviewRequired when unreachable")
    p_vp.set_defaults(func=cmd_verify_professional)

    p_vc = sub.add_parser("verify-company", help="Compare company website and ADMIN HR email domains")
    p_vc.add_argument("--company", type=int, required=True)
    p_vc.add_argument("--actor", default="system")
    p_vc.set_defaults(func=cmd_verify_company)

    p_vcs = sub.add_parser("verify-companies", help="Batch domain verification of PENDING companies")
    p_vcs.add_argument("--limit", type=int, default=50)
    p_vcs.add_argument("--actor", default="system")
    p_vcs.add_argument("--progress", action="store_true", help="Print progress for each company")
    p_vcs.set_defaults(func=cmd_verify_companies)

    p_rec = sub.add_parser("reconcile-expired", help="Flip stale PENDING requests to EXPIRED")
    p_rec.add_argument("--batch-size", type=int, default=settings.reconcile_batch_size)
    p_rec.add_argument("--max-batches", type=int, default=1, help="Batches to run (default 1, a single reconcile call)")
    p_rec.add_argument("--drain", action="store_true", help="Repeat batches until no stale rows remain")
    p_rec.set_defaults(func=cmd_reconcile_expired)

    p_st = sub.add_parser("stats", help="Introduction statistics for a company")
    p_st.add_argument("--company", type=int, required=True)
    p_st.add_argument("--json", action="store_true", help="Print JSON instead of the text summary")
    p_st.set_defaults(func=cmd_stats)

    p_vq = sub.add_parser("verification-queue", help="Count items awaiting verification review")
    p_vq.add_argument("--threshold", type=int, default=None)
    p_vq.set_defaults(func=cmd_verification_queue)

    p_set = sub.add_parser("settings", help="Read or change system settings")
    p_set.add_argument("action", choices=["get", "set"])
    p_set.add_argument("--key", default=None)
    p_set.add_argument("--value", default=None)
    p_set.add_argument("--updated-by", default="admin")
    p_set.set_defaults(func=cmd_settings)

    p_ap = sub.add_parser("approve", help="Admin approval of a professional or company")
    p_ap.add_argument("--entity-type", choices=list(ENTITY_TYPES), required=True)
    p_ap.add_argument("--entity-id", type=int, required=True)
    p_ap.add_argument("--reviewer", required=True)
    p_ap.add_argument("--status", default=None, help="Target status (default BASIC / VERIFIED)")
    p_ap.add_argument("--notes", default=None)
    p_ap.set_defaults(func=cmd_approve)

    p_rj = sub.add_parser("reject", help="Admin rejection of a professional or company")
    p_rj.add_argument("--entity-type", choices=list(ENTITY_TYPES), required=True)
    p_rj.add_argument("--entity-id", type=int, required=True)
    p_rj.add_argument("--reviewer", required=True)
    p_rj.add_argument("--reason", required=True)
    p_rj.set_defaults(func=cmd_reject)
    return parser


def main(argv=None):
    settings = get_settings()
    init_logging(settings.log_level)
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except IntroError as e:
        _emit(e.to_dict())
        sys.exit(2)
    finally:
        conn = getattr(args, "conn", None)
        if conn is not None:
            conn.close()


if __name__ == "__main__":
    main()
