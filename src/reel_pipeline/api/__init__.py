"""HTTP surface: jobs API, face registry routes and the jobs console."""
