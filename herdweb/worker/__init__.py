"""Background jobs and a thread-based worker that runs them."""