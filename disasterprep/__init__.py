"""DisasterPrep EDU: preparedness score, earthquake drill and quiz engine.

The pygame shell lives in ``disasterprep.app``; everything else is headless
and driven through ``disasterprep.state.PreparednessState``.
"""
