"""Construct Engine — quest progression and narrative pacing for interactive sessions."""
