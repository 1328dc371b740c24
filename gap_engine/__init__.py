"""Gap Engine: two-party relationship gap scoring and reporting."""
