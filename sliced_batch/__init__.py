"""
sliced_batch -- Progress and state tracking for sliced batch jobs.

A sliced job splits its records into many slices that a pool of concurrent,
possibly distributed workers claim, process, retry and complete.  This
package answers how far along such a job is, who is working on it and when
it should finish, using cheap best-effort queries against a slice store that
other actors mutate concurrently.

Architecture:
    sliced_batch/domain    job entity, slice DTOs, pure derivations
    sliced_batch/stores    SliceStore protocol, in-memory and SQL stores
    sliced_batch/models    SQLAlchemy slice model
    sliced_batch/services  status reporter, monitor facade, upload dispatch

Invariants:
    - Only a COMPLETED job reports 100 percent.
    - Reporting never writes to a slice store or advances job state.
    - Worker counts hit a store at most once per job per second.
    - Slice store failures propagate untranslated.
"""
